"""
Static phone number lookup tables.

Both maps are read-only views built once at import time.
"""

from types import MappingProxyType

# =============================================================================
# NANP AREA CODES (country code 1)
# =============================================================================

_CARIBBEAN = {
    "809": "Dominican Republic", "829": "Dominican Republic", "849": "Dominican Republic",
    "787": "Puerto Rico", "939": "Puerto Rico",
    "684": "American Samoa", "264": "Anguilla", "268": "Antigua and Barbuda",
    "242": "Bahamas", "246": "Barbados", "441": "Bermuda",
    "284": "British Virgin Islands", "345": "Cayman Islands", "767": "Dominica",
    "473": "Grenada", "671": "Guam", "876": "Jamaica", "658": "Jamaica",
    "664": "Montserrat", "670": "Northern Mariana Islands",
    "869": "Saint Kitts and Nevis", "758": "Saint Lucia",
    "784": "Saint Vincent and the Grenadines", "721": "Sint Maarten",
    "868": "Trinidad and Tobago", "649": "Turks and Caicos Islands",
    "340": "US Virgin Islands",
}

_USA = """
201 202 203 205 206 207 208 209 210 212 213 214 215 216 217 218 219 220 223 224
225 228 229 231 234 239 240 248 251 252 253 254 256 260 262 267 269 270 272 276
281 301 302 303 304 305 307 308 309 310 312 313 314 315 316 317 318 319 320 321
323 325 326 330 331 332 334 336 337 339 346 347 351 352 360 361 364 380 385 386
401 402 404 405 406 407 408 409 410 412 413 414 415 417 419 423 424 425 430 432
434 435 440 442 443 445 458 463 469 470 475 478 479 480 484 501 502 503 504 505
507 508 509 510 512 513 515 516 517 518 520 530 531 534 539 540 541 551 559 561
562 563 564 567 570 571 573 574 575 580 585 586 601 602 603 605 606 607 608 609
610 612 614 615 616 617 618 619 620 623 626 628 629 630 631 636 641 646 650 651
657 659 660 661 662 667 669 678 680 681 682 689 701 702 703 704 706 707 708 712
713 714 715 716 717 718 719 720 724 725 726 727 731 732 734 737 740 743 747 754
757 760 762 763 765 769 770 772 773 774 775 779 781 785 786 801 802 803 804 805
806 808 810 812 813 814 815 816 817 818 820 828 830 831 832 838 843 845 847 848
850 854 856 857 858 859 860 862 863 864 865 870 872 878 901 903 904 906 907 908
909 910 912 913 914 915 916 917 918 919 920 925 928 929 930 931 934 936 937 938
940 941 945 947 949 951 952 954 956 959 970 971 972 973 975 978 979 980 984 985
986 989
""".split()

_CANADA = """
204 226 236 249 250 289 306 343 365 367 368 382 403 416 418 431 437 438 450 506
514 519 548 579 581 587 604 613 639 647 672 705 709 742 778 780 782 807 819 825
867 873 902 905
""".split()


def _build_nanp():
    table = dict(_CARIBBEAN)
    table.update({code: "USA" for code in _USA})
    table.update({code: "Canada" for code in _CANADA})
    return MappingProxyType(table)


NANP_AREA_CODES = _build_nanp()

# =============================================================================
# INTERNATIONAL CALLING CODES
# =============================================================================

CALLING_CODES = MappingProxyType({
    # South America
    "54": "Argentina", "591": "Bolivia", "55": "Brazil", "56": "Chile",
    "57": "Colombia", "593": "Ecuador", "595": "Paraguay", "51": "Peru",
    "598": "Uruguay", "58": "Venezuela",
    # Central America & Caribbean
    "501": "Belize", "506": "Costa Rica", "53": "Cuba", "503": "El Salvador",
    "502": "Guatemala", "509": "Haiti", "504": "Honduras", "52": "Mexico",
    "505": "Nicaragua", "507": "Panama",
    # Europe
    "43": "Austria", "32": "Belgium", "45": "Denmark", "358": "Finland",
    "33": "France", "49": "Germany", "30": "Greece", "353": "Ireland",
    "39": "Italy", "31": "Netherlands", "47": "Norway", "48": "Poland",
    "351": "Portugal", "7": "Russia", "34": "Spain", "46": "Sweden",
    "41": "Switzerland", "44": "United Kingdom", "380": "Ukraine",
    # Asia
    "86": "China", "91": "India", "62": "Indonesia", "81": "Japan",
    "60": "Malaysia", "63": "Philippines", "65": "Singapore", "82": "South Korea",
    "66": "Thailand", "84": "Vietnam",
    # Oceania
    "61": "Australia", "64": "New Zealand",
    # Middle East
    "971": "United Arab Emirates", "966": "Saudi Arabia", "972": "Israel",
})

UNKNOWN_COUNTRY = "Unknown"
NANP_DEFAULT_COUNTRY = "USA"
